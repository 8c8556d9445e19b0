"""
# Fileunpacker

Extract the resources embedded into a container file: the container is
scanned looking for the signature of a format and the size of each
resource found is calculated from its own header.

The binary structures are described declaratively

    class RIFFHeader(Chunk):
        magic     = fields.StringField(4, default=b'RIFF', is_magic=True)
        riff_size = fields.StructField('I')
        format    = fields.StringField(4, default=b'WAVE', is_magic=True)

and two basic operations are defined for them:

 1. unpack(): read the binary data from a stream and build a high-level
    representation of that; each field reads as many bytes as it needs
    from the current position of the stream.

 2. pack(): encode the high-level representation into binary data.

The D3GR graphic resources can be further decoded: each frame becomes a
24 bits bitmap and all the frames of a resource can be composed into a
single spritesheet.
"""
