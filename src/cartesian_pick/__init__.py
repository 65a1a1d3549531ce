"""Straight-line Cartesian motion and vertical pick/lift sequencing for robot arms."""
