"""
sitedata.cli — Click-based CLI entry point and command handlers.

Commands:
    get / set / clear   Read and write per-origin values
    perms               Inspect and edit site permissions
    db                  Schema version and migrations
    config              Show, validate and edit the config file
    version             Show version information
"""
