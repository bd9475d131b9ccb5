"""Export Cloudflare KV page-view counters into sorted CSV files."""

__version__ = "0.3.0"
