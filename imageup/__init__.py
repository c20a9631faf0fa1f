"""
ImageUp: automatic image and file uploads for Django models.
"""
