"""Screens, selection and key hints."""
