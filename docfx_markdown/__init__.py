"""Convert DocFX ManagedReference YAML into cross-linked Markdown pages."""
