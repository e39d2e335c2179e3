"""Simulation context, the simulator interface and the override object cache."""