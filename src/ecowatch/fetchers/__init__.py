"""Upstream source fetchers: weather, air quality, warnings bulletin, seismic feed."""
