"""
Branch (syubiyah) management feature module.
"""
