"""Output renderers for firmware parameter files and ground station mix files."""
from framemixer.post.renderers import MixRenderer, ParamRenderer, Renderer

__all__ = ["MixRenderer", "ParamRenderer", "Renderer"]
