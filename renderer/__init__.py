"""
Renderer module for the Hat Pack Editor
Handles element textures and their live reloading

Texture (renderer.texture) needs PyOpenGL and a current GL context, so it is
imported from its module directly.
"""

from .texture_reloader import TextureReloader

__all__ = [
    'TextureReloader',
]
