"""Core auction engine: state machine, winner selection and collaborators."""
