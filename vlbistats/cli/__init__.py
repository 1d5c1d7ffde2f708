"""
Command line tools for analysing batches of images.
"""
__title__ = "Command line tools"
