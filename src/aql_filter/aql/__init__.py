"""AQL rendering: expression composition, pagination and query templates."""
