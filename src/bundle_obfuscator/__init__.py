"""Post-bundling transform of application modules inside a bundle."""

from .pipeline import BundlePipeline, PipelineResult, create_pipeline, obfuscate_bundle

__all__ = ["BundlePipeline", "PipelineResult", "create_pipeline", "obfuscate_bundle"]
