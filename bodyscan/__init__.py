"""
Body scan sizing service: guided pose capture, landmark measurements and size recommendations
"""
__version__ = "1.0.0"
