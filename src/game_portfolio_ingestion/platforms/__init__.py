"""Package accessor implementations for the ingestion pipeline.

Each platform module (zip, directory) provides a PackageSource and
auto-registers itself with the SourceRegistry when imported.
"""

# Platform modules are imported by SourceRegistry.discover_platforms()
