#!/usr/bin/env python3
"""Terminal front ends: completion output, prompt_toolkit adapter and the interactive shell"""
