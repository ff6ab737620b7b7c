"""Application layer: DTOs, services and wiring used by the interface layer."""
