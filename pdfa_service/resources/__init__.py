"""Packaged report stylesheets."""
