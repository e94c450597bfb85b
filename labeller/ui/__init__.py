"""Terminal output for the labeller CLI."""
