############################################################
#
# inkwell - Versioned Content Management Backend
#
# __init__.py: Root package initialization and version definition
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Inkwell - Versioned Content Management Backend."""

__version__ = "0.1.0"
