"""addrhooks — payment webhooks for watched blockchain addresses."""

__version__ = "0.1.0"
