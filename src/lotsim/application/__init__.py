# File: src/lotsim/application/__init__.py
