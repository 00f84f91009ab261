"""In-place rhythm transforms"""
from .quantize import quantize, swing

__all__ = ['quantize', 'swing']
