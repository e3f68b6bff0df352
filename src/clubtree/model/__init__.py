"""
The MODEL layer contains pure data structures: member records, the sponsor
hierarchy and plain geometry.
It has NO knowledge of Qt or of the rendering side.
It deals with Records, the Tree and I/O.
"""
