"""Core data model: opcodes, instructions, execution state and errors."""
