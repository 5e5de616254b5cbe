"""Usher Client SDK"""
from .client import Client, ClientError
from .user import User

__all__ = ['Client', 'ClientError', 'User']
