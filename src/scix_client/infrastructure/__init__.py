"""Infrastructure layer: HTTP transport and SciX API operations."""
