"""DEX protocols, pools, tokens, swap events and an in-memory pool cache."""