"""
Services package initialization
"""
from .measurement import measurement_service
from .recommendation import recommendation_service
from .session_manager import session_manager
