"""
Signature feature.

Client signature capture on a pointer-driven drawing surface, data-URL
serialization, and downscale/JPEG compression before upload.
"""
