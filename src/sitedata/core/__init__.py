"""sitedata.core — origin resolution, permission keys, configuration and errors."""
