from services.recipes.main import run

run()
