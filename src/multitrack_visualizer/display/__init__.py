"""Frame buffer and panel renderers."""
