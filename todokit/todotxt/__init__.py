"""todo.txt syntax helpers: dates, priorities and subject tokens."""
