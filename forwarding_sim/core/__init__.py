"""Core components for the forwarding simulation.

This module contains the fundamental classes and functions for the simulation,
including Packet, Edge, TokenBucket, Router, Graph and ForwardingEngine.
"""
