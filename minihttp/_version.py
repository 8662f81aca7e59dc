# This file must be kept very simple, because it is consumed from several
# places -- it is imported by minihttp/__init__.py, execfile'd by setup.py, etc.

# We use a simple scheme:
#   1.0.0 -> 1.0.0+dev -> 1.1.0 -> 1.1.0+dev
# where the +dev versions are never released into the wild, they're just what
# we stick into the VCS in between releases.

__version__ = "0.2.0+dev"
