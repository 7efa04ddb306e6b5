# titanvanguard

A small multiplayer arena shooter played on a grid. Players move around a
randomly generated map, shoot at each other and destroy walls. Some walls hide
bombs, and a bomb clears every destructible wall within ten cells of it.

The package has three parts.

- **The game model**
  - `titanvanguard.mapgen.MapGenerator` generates the map.
  - `titanvanguard.gamemap.GameMap` is the playing field.
  - `titanvanguard.wall` holds walls and bombs.
  - `titanvanguard.player.Player`, `titanvanguard.weapon.Weapon` and
    `titanvanguard.bullet.Bullet` are the pieces in play.
  - `titanvanguard.game.Game` holds the rules of a match: moving bullets,
    hits, wall destruction, ranking the winner and runner-up, and weapon
    upgrades.
- **The server**
  - `titanvanguard.server.create_app` builds a Flask application.
  - User accounts are kept in SQLite by `titanvanguard.storage.UserDatabase`.
  - Game sessions and the matchmaking queue belong to
    `titanvanguard.sessions.SessionManager`.
- **The client**
  - `titanvanguard.client.api.GameClient` is a synchronous HTTP client for the
    server.
  - `titanvanguard.client.board.BoardView` keeps a local copy of the map,
    players and bullets in step with the server.

## Installing

```
pip install titanvanguard
```

## Running the server

```
titanvanguard-server [--host HOST] [--port PORT] [--database PATH]
```

| Option       | Default                  | Meaning                          |
|--------------|--------------------------|----------------------------------|
| `--host`     | `0.0.0.0`                | address to listen on             |
| `--port`     | `8080`                   | port to listen on                |
| `--database` | `Titans_vanguard.sqlite` | SQLite file holding the accounts |

### Endpoints

The server answers JSON requests.

| Method | Path                                   | Action                            |
|--------|----------------------------------------|-----------------------------------|
| GET    | `/login/<username>`                    | log in                            |
| POST   | `/register`                            | register a user                   |
| POST   | `/game/create`                         | create a game                     |
| POST   | `/game/join`                           | join a game                       |
| POST   | `/game/leave`                          | leave a game                      |
| GET    | `/game/status/<id>`                    | lobby status of a game            |
| POST   | `/generateMap`                         | fetch a session's tile matrix     |
| POST   | `/game/move`                           | move a player                     |
| POST   | `/game/shoot`                          | shoot                             |
| POST   | `/game/syncBullets`                    | advance and report bullets        |
| POST   | `/game/updateWalls`                    | report destroyed walls            |
| POST   | `/game/syncPlayers`                    | report players                    |
| POST   | `/game/joinQueue`                      | join the matchmaking queue        |
| POST   | `/matchmaking/queue`                   | join the first open session       |
| GET    | `/matchmaking/status/<id>`             | matchmaking status of a session   |

### Sessions and matchmaking

- A background loop started by `titanvanguard.server.start_matchmaking` runs
  once a second.
- The loop groups players waiting in the queue into matches of two to four.
- Every session is created needing two players.

## Map tiles

Every cell of a map holds one `titanvanguard.mapgen.MapTile` value:

| Value | Tile                          |
|-------|-------------------------------|
| 0     | player position               |
| 1     | free space                    |
| 2     | destructible wall             |
| 3     | destructible wall with a bomb |
| 4     | indestructible wall           |

Players start in the corners of the map. Moves and shots use these directions:

| Key | Direction |
|-----|-----------|
| `w` | up        |
| `s` | down      |
| `a` | left      |
| `d` | right     |

## Using the client

```python
from titanvanguard.client.api import GameClient
from titanvanguard.client.board import BoardView

client = GameClient("http://localhost:8080", None)
client.register("alice")
username, score = client.login("alice")

session_id = client.join_queue("alice", 100)

board = BoardView(client, session_id, "alice")
board.load_map()
board.press_key("d")     # turn and move right
board.press_key(" ")     # shoot in the current direction
errors = board.tick()    # sync bullets, walls and players
print(board.render())
```

### Errors

Requests that the server refuses, or that fail, raise
`titanvanguard.client.api.ClientError`. The exception carries the HTTP status
in `status` when there is one.

`BoardView.tick` does not raise these errors. It collects them and returns
them instead.

### Board text

`BoardView.render` draws the board as text:

| Glyph             | Meaning             |
|-------------------|---------------------|
| `1`–`4`           | players             |
| `.`               | free space          |
| `#`               | destructible wall   |
| `*`               | wall with a bomb    |
| `@`               | indestructible wall |
| `o`               | bullet              |

## What the package does not do

- There is no graphical game window or login screen. The board exists only as
  data plus the text from `BoardView.render`.
- The client does not poll the server on its own. The caller decides when to
  run `BoardView.tick`.

## Running the tests

```
pip install "titanvanguard[test]"
pytest
```