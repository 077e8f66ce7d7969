"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blocknote.cli.commands import (
    add_block_cmd, archive_cmd, delete_cmd, export_cmd, import_cmd, init_cmd, list_cmd,
    move_block_cmd, new_cmd, remove_block_cmd, set_block_cmd, show_cmd, stats_cmd, tag_cmd,
    unarchive_cmd,
)


app = typer.Typer(name="blocknote", no_args_is_help=True, help="Local-first block document notes")

app.command(name="init")(init_cmd)
app.command(name="new")(new_cmd)
app.command(name="import")(import_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="add-block")(add_block_cmd)
app.command(name="set-block")(set_block_cmd)
app.command(name="remove-block")(remove_block_cmd)
app.command(name="move-block")(move_block_cmd)
app.command(name="tag")(tag_cmd)
app.command(name="archive")(archive_cmd)
app.command(name="unarchive")(unarchive_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="stats")(stats_cmd)
app.command(name="export")(export_cmd)
