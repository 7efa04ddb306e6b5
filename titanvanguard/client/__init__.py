"""HTTP client for the game server and a board view kept in step with it."""