"""Self-service employee performance tracker."""
