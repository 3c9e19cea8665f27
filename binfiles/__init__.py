"""
# Binfiles: binary images for humans.

A binary image is represented in memory as a sparse buffer of bytes (see `Image`) where
each address can be explicitly set or left unset; a contiguous run of set bytes is a
`Fragment`.

Two basic operations are defined between an image and its textual representation

 1. read: tokenize the records of a stream, validate them and assemble the
    data they carry into an image.

 2. write: split the image on a grid of cells as wide as the maximum record length
    and encode each piece as a record, followed by the terminator.

At the moment the only supported format is Intel HEX (see `binfiles.hex`) restricted
to a 16-bit address space.
"""
