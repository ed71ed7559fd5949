"""Network construction for the forwarding simulation.

This module provides builders for router sets, standard topologies and
packet workloads.
"""
