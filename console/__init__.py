"""Command-line console for the clinic front desk."""
