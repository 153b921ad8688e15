"""
Signature module.

Provides the headless signature capture surface (draw / clear / export /
import with resize reconciliation), the PNG data-URL codec, and a Tk pad
widget that binds the surface to a resizable canvas.
"""
