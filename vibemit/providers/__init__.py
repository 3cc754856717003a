"""Model backend drivers for vibemit."""
