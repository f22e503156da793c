"""
planarcv: robust planar homography estimation for keypoint match filtering.
"""

__version__ = "0.1.0"
