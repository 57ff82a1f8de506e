# Balances within EPSILON of zero are treated as settled everywhere.
EPSILON = 1e-9
