"""
Decoders for Wavefront OBJ meshes and TGA textures.
"""
