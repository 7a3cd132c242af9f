"""Engine, phases, statistics and history"""
