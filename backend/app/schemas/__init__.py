# app/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .transcript import *
from .voiceflow import *
from .webhook import *
