from gotomaster.commands import run

run()
