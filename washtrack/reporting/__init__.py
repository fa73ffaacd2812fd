"""Report builder engine: column registry, configuration, execution and export."""
