"""Versioned API (v1). Import the aggregated router from `cinelist.api.v1.routers`."""
