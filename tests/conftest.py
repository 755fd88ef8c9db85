import matplotlib

# Headless backend for the preview rendering tests
matplotlib.use("Agg")
