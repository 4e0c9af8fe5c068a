"""
The MODEL layer contains pure data structures and the file decoders.
It has NO knowledge of the Visualization (PyVista).
It deals with Geometry, Images, and I/O.
"""
