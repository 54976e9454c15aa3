"""Static site baking package.

This package turns mutable CMS content plus a separate visualization
configuration store into renderer-ready page models for a static site. Embedded
interactive charts are paired with pre-rendered exports so every baked page
has a static fallback.

Package Structure
-----------------
- `pipeline/content/`:
    Typed CMS rows, page models and the collaborator protocols consumed by
    the pipeline.
- `pipeline/formatting/`:
    Formatting-directive extraction, embedded-visualization scanning and the
    default post formatter.
- `pipeline/exports/`:
    The export table on disk, the export resolution store with per-chart
    render de-duplication, and the HTTP render-service client.
- `pipeline/site_builder/`:
    Page and index assemblers, thumbnail variant selection and the site
    runner that writes baked HTML to disk.
- `config.py`: Configuration constants, as UPPER_SNAKE_CASE.
- `exceptions.py`: The project exception hierarchy.

Examples
--------
>>> import sitebake
>>> # See sitebake.pipeline.site_builder.runner.bake_site for the entrypoint.
"""
