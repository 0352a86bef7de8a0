"""Wire-level names shared by the websocket server and the runtime."""
