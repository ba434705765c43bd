from jntuh_bot.bot import main

main()
