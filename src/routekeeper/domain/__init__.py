"""Domain layer: catalog model, template matching, reconciliation and verification."""
