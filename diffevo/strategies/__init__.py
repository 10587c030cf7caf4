"""Pluggable mutation, selection and termination strategies."""
