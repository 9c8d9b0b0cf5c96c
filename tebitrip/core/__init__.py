# Core infrastructure: exceptions, logging, persistence and service wiring
