"""Transfer drivers."""

from .curl import curl_stage, probe_url

__all__ = ["curl_stage", "probe_url"]
