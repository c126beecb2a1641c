"""Aircraft systems package.

Physical models of aircraft subsystems: the electrical component network and
its components, and hydraulic actuators. Each aircraft wires its own set of
components together (see ``aerotwin.aircraft.builder``).
"""
