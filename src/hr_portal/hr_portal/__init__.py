"""HR portal: task tracking, leave and notifications over a hosted backend."""
