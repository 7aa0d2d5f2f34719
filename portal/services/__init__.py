"""Lifecycle services"""
