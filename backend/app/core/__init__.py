############################################################
#
# inkwell - Versioned Content Management Backend
#
# __init__.py: Core application logic package
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Core content logic for Inkwell."""
